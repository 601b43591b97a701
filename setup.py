"""Build configuration for Sticker Album.

Install for development (any platform):
    pip install -e .[test]

Build the macOS app bundle:
    python setup.py py2app

Produces: dist/Sticker Album.app
"""
import sys

from setuptools import setup

APP = ['album_app.py']
DATA_FILES = []
OPTIONS = {
    'argv_emulation': False,  # must be False for Qt apps
    'plist': {
        'CFBundleName': 'Sticker Album',
        'CFBundleDisplayName': 'Sticker Album',
        'CFBundleIdentifier': 'com.stickeralbum.app',
        'CFBundleVersion': '1.0.0',
        'CFBundleShortVersionString': '1.0',
        'LSMinimumSystemVersion': '11.0',
        'NSHighResolutionCapable': True,
        'CFBundleDocumentTypes': [{
            'CFBundleTypeName': 'Image',
            'CFBundleTypeRole': 'Viewer',
            'LSHandlerRank': 'Alternate',
            'LSItemContentTypes': ['public.image'],
        }],
    },
    'packages': ['PySide6', 'PIL'],
    'strip': False,  # avoid "Operation not permitted" on macOS SIP-protected binaries
}

MODULES = [
    'album_app', 'controller', 'gestures', 'hashing', 'importer',
    'models', 'navigation', 'normalizer', 'session', 'storage', 'views',
]

extra = {}
if 'py2app' in sys.argv:
    extra = dict(
        app=APP,
        data_files=DATA_FILES,
        options={'py2app': OPTIONS},
        setup_requires=['py2app'],
    )

setup(
    name='sticker-album',
    version='1.0.0',
    description='Collect pictures as numbered stickers in a fixed-size album',
    python_requires='>=3.10',
    py_modules=MODULES,
    install_requires=['PySide6>=6.4', 'Pillow>=9.1'],
    extras_require={'test': ['pytest', 'pytest-qt']},
    entry_points={'gui_scripts': ['sticker-album = album_app:main']},
    **extra,
)
