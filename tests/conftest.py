import os
import tempfile

import pytest
from PIL import Image

# Headless Qt, and keep QSettings writes away from the user's real config
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ["XDG_CONFIG_HOME"] = tempfile.mkdtemp(prefix="gridcrop-settings-")


def make_image(width, height):
    """Image whose pixel (x, y) encodes its own coordinates."""
    image = Image.new("RGB", (width, height))
    image.putdata([(x % 256, y % 256, (x // 256) * 16 + y // 256)
                   for y in range(height) for x in range(width)])
    return image


@pytest.fixture
def image_900x600():
    return Image.new("RGB", (900, 600), (200, 120, 40))
