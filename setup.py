# -*- coding: utf-8 -*-
import setuptools
import pathlib
import site
import sys

# odd bug with develop (editable) installs, see: https://github.com/pypa/pip/issues/7953
site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

required = [
    "mashumaro",
    "loguru",
]

extras_test = [
    "pytest",
]

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

# Read version
version = {}
with open("src/bciremote/_version.py", "r") as f:
    exec(f.read(), version)

if __name__ == "__main__":
    setuptools.setup(
        name="bciremote",
        version=version["__version__"],
        description="Remote control client for the BCI2000 operator.",
        long_description=long_description,
        long_description_content_type="text/markdown",
        keywords=[
            "BCI2000",
            "BCI",
            "Operator",
            "Remote control",
        ],
        classifiers=[
            "License :: OSI Approved :: MIT License",
            "Development Status :: 3 - Alpha",
        ],
        license="MIT",
        package_dir={"": "src"},
        packages=setuptools.find_packages(
            where="src",
            exclude=["*.test", "*.test.*", "test.*", "test", "test_*"],
        ),
        install_requires=required,
        extras_require={"test": extras_test},
        python_requires=">= 3.11",
        package_data={"": ["*.md", "*.ini"]},
    )
# https://setuptools.readthedocs.io/en/latest/userguide/datafiles.html
