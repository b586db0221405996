
utf8_bom = "\ufeff"


def strip_utf8_bom(text: str) -> str:
    # removes a leading utf-8 byte order mark from decoded text if present.
    if text.startswith(utf8_bom):
        return text[len(utf8_bom):]
    return text


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n")


def normalize_text(text: str) -> str:
    # bom-free, lf-only text; used for all externally supplied data.
    return normalize_newlines(strip_utf8_bom(text))
