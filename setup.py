"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/depp/spicy"
KEYWORDS = "n64 rom makerom linker toolchain mips cartridge"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="spicy",
        version="0.1.0",
        description="ROM image builder driving an external MIPS toolchain",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=[],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "spicy=spicy.cli:main",
            ],
        },
        include_package_data=True)
