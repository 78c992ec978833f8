import re

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}

MAX_FILENAME_PROMPT_CHARS = 50


def extension_for_media_type(media_type: str) -> str:
    """Return the file extension for an image media type, defaulting to png."""
    return _EXTENSIONS.get(media_type.split(";")[0].strip().lower(), "png")


def sanitize_filename(prompt: str, media_type: str = "image/png") -> str:
    """
    Build a download filename from a prompt.

    Args:
        prompt (str): The prompt the image was generated from.
        media_type (str): Media type of the image, used for the extension.

    Returns:
        str: The first 50 prompt characters with every character outside
        ``[A-Za-z0-9]`` replaced by an underscore, plus the extension.
    """
    stem = re.sub(r"[^a-zA-Z0-9]", "_", prompt[:MAX_FILENAME_PROMPT_CHARS])
    if not stem:
        stem = "image"
    return f"{stem}.{extension_for_media_type(media_type)}"
