from typing import Optional, Sequence


class RuntplError(Exception):
    # base exception for all application-specific errors.
    pass


class TemplateSyntaxError(RuntplError):
    # malformed template source, always raised at parse time.
    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)


class RenderError(RuntplError):
    # errors raised while evaluating a parsed template.
    pass


class UnknownFunctionError(RenderError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown function '{name}'")


class TemplateTypeError(RenderError):
    # a value has the wrong type for where it is used (e.g. a non-list loop source).
    pass


class PathError(RenderError):
    def __init__(self, path: Sequence[str], segment: str, found_type: str):
        self.path = ".".join(path)
        self.segment = segment
        super().__init__(
            f"cannot look up '{segment}' in '{self.path}': value is a {found_type}, not an object"
        )


class UnresolvedVariableError(RenderError):
    def __init__(self, path: Sequence[str]):
        self.path = ".".join(path)
        super().__init__(f"variable '{self.path}' is not defined")


class FunctionArgumentError(RenderError):
    # invalid, missing or unknown argument passed to a built-in function.
    pass


class FileReadError(RenderError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"could not read '{path}': {reason}")


class ContextError(RuntplError):
    # errors while assembling the data context from arguments or json.
    pass


class ConfigError(RuntplError):
    # errors related to configuration.
    pass


class TemplateStoreError(RuntplError):
    # errors managing template files.
    pass


class EditorError(RuntplError):
    # the external editor could not be run.
    pass


class InteractiveAbort(RuntplError):
    # user left the interactive editor without making changes; not a failure.
    pass
