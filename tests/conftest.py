import io

import pytest
from PIL import Image


MESSAGE = b'This is where your secret message will be!'


@pytest.fixture
def minimal_png():
    """A real (and tiny) PNG file, as generated by Pillow."""
    buffer = io.BytesIO()
    Image.new('RGB', (1, 1), color='red').save(buffer, format='PNG')

    return buffer.getvalue()


@pytest.fixture
def message():
    return MESSAGE


@pytest.fixture
def png_path(tmp_path, minimal_png):
    path = tmp_path / 'red.png'
    path.write_bytes(minimal_png)

    return path
