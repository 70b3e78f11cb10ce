"""
Pytest fixtures for Exposé Builder tests.

Every store runs against a private in-memory SQLite database and every
image is generated on the fly, so the tests need no files or network.
"""
import io
import os
import struct
import zlib
from unittest.mock import Mock

import numpy as np
import pytest
from PIL import Image

# Set test environment before importing the package
os.environ['EXPOSE_DATABASE_URL'] = 'sqlite://'
os.environ['EXPOSE_LANGUAGE'] = 'de'
os.environ['EXPOSE_THEME'] = 'blue'
os.environ['SECRET_KEY'] = 'test-secret-key'

from expose_builder.database.store import ExposeStore  # noqa: E402
from expose_builder.images.processor import ImageProcessor  # noqa: E402
from expose_builder.models.expose import new_record  # noqa: E402


@pytest.fixture
def make_image():
    """Factory for encoded test images: flat colour or random noise"""
    def _make(size=(64, 48), color=(120, 80, 40), fmt='JPEG', noise=False, seed=0):
        if noise:
            rng = np.random.default_rng(seed)
            pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
            img = Image.fromarray(pixels)
        else:
            img = Image.new('RGB', size, color)
        buffer = io.BytesIO()
        img.save(buffer, format=fmt)
        return buffer.getvalue()
    return _make


@pytest.fixture
def oversized_png():
    """PNG whose header declares 20000x20000 pixels; Pillow refuses to open it"""
    def chunk(tag, data):
        crc = zlib.crc32(tag + data) & 0xffffffff
        return struct.pack('>I', len(data)) + tag + data + struct.pack('>I', crc)

    header = struct.pack('>IIBBBBB', 20000, 20000, 8, 2, 0, 0, 0)
    return b'\x89PNG\r\n\x1a\n' + chunk(b'IHDR', header) + chunk(b'IDAT', b'') + chunk(b'IEND', b'')


@pytest.fixture
def processor():
    return ImageProcessor(quality=85, workers=2)


@pytest.fixture
def data_uri(processor, make_image):
    """A processed photo as stored in a PhotoCollection"""
    return processor.optimize(make_image(size=(80, 60), noise=True)).data_uri


@pytest.fixture
def store():
    return ExposeStore(url='sqlite://')


@pytest.fixture
def sample_record():
    """Apartment with rent figures, so every derived field has a value"""
    return new_record(
        titel='Helle 3-Zimmer-Wohnung',
        adresse='Hauptstr. 5, 10115 Berlin',
        lage='Zentral, ruhig',
        baujahr='1998',
        wohnflaeche='100',
        zimmer='3',
        verkaufspreis='300000',
        ist_miete='1000',
        soll_miete='1250',
        maklercourtage='3',
        heizungsart='Gas-Zentralheizung',
        energiebedarf='120',
        kontakt_name='Max Makler',
        kontakt_email='max@example.com',
    )


@pytest.fixture
def geocoder():
    """Stand-in for GeocodingClient"""
    return Mock()


@pytest.fixture
def app(geocoder):
    from expose_builder.dashboard.app import create_app
    return create_app({
        'TESTING': True,
        'DATABASE_URL': 'sqlite://',
        'GEOCODER': geocoder,
    })


@pytest.fixture
def client(app):
    return app.test_client()
