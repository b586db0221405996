# runtpl/core/output.py
"""Handles writing the rendered template to stdout and the clipboard."""
import sys

import pyperclip  # type: ignore
import structlog

log = structlog.get_logger(__name__)


def write_to_stdout(text_content: str):
    """writes text to standard output and flushes to ensure visibility."""
    try:
        sys.stdout.write(text_content)
        sys.stdout.flush()
    except UnicodeEncodeError as e:
        log.warning("stdout_write_failed_trying_binary_fallback", error=str(e))
        # fallback for terminals that can't encode the rendered text.
        sys.stdout.buffer.write(text_content.encode("utf-8", errors="replace"))
        sys.stdout.buffer.flush()


def copy_to_clipboard(text_content: str) -> bool:
    """
    copies text content to the system clipboard using pyperclip.
    prints user-facing messages about success/failure to stderr.
    returns true if successful, false otherwise.
    """
    log.info("attempting_to_copy_output_to_clipboard")
    try:
        pyperclip.copy(text_content)
    except pyperclip.PyperclipException as e:
        log.warning(
            "clipboard_copy_failed_pyperclip_exception",
            error=str(e),
            note="ensure clipboard utility (xclip/pbcopy) is installed and accessible.",
        )
        print(f"\n\nWarning: Could not copy to clipboard: {e}", file=sys.stderr)
        return False
    log.info("successfully_copied_to_clipboard_via_pyperclip")
    # stdout may be piped, so user feedback goes to stderr.
    print("\n\n(Result copied to clipboard)", file=sys.stderr)
    return True
