"""Setup for Pomodo.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "Pomodo",
        "CFBundleDisplayName": "Pomodo",
        "CFBundleIdentifier": "com.pomodo.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

setup(
    app=APP,
    data_files=DATA_FILES,
    options={"py2app": OPTIONS},
    name="Pomodo",
    version="0.1.0",
    python_requires=">=3.10",
    packages=find_packages(include=["pomodo", "pomodo.*"]),
    install_requires=[
        "PyQt6",
        "numpy",
        "SQLAlchemy>=2.0",
        "httpx",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": ["pomodo = pomodo.__main__:main"],
    },
)
