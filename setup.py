"""
Setup configuration for cc-focus.

Live status monitor for coding-assistant sessions: hook events in over a Unix
socket, working / needs-input view out.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read long description from README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="cc-focus",
    version="1.0.0",
    description="Track which coding-assistant sessions are working or waiting for input",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cc_focus", "cc_focus.*"]),
    install_requires=[
        "pydantic>=2.4",
        "psutil>=5.9",
    ],
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "cc-focus=cc_focus.__main__:main",
            "cc-focus-send=cc_focus.hook_client:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
