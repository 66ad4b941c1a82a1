import os
from urllib.parse import quote

DEFAULT_BASENAME = "document"


def derive_output_filename(original: str, target_lang: str) -> str:
    """
    report.docx + fr -> report.fr.docx, README + de -> README.de

    Splits on the rightmost dot like os.path.splitext, so a dot-file such as
    .gitignore has no extension and gets the code appended.
    """
    name = original or DEFAULT_BASENAME
    stem, ext = os.path.splitext(name)
    if not ext:
        return f"{name}.{target_lang}"
    return f"{stem}.{target_lang}{ext}"


def content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'
