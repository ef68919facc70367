"""Image downscaling for thumbnail generation."""

from io import BytesIO

from PIL import Image


def resize(data: bytes, width: int) -> bytes:
    """
    Resize an image to the given width, preserving aspect ratio and format.

    Args:
        data: Encoded original image
        width: Target width in pixels

    Returns:
        Encoded resized image

    Raises:
        PIL.UnidentifiedImageError: If data is not a readable image
    """
    with Image.open(BytesIO(data)) as image:
        image_format = image.format or "PNG"
        height = max(1, round(image.height * width / image.width))
        resized = image.resize((width, height), Image.Resampling.LANCZOS)

        if image_format == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        output = BytesIO()
        resized.save(output, format=image_format)
        return output.getvalue()
