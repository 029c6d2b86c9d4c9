import re

from setuptools import setup

# flagkit/__init__.py imports runtime dependencies, read the constants from the source
with open("flagkit/const.py") as f:
    source = f.read()

VERSION = tuple(int(n) for n in re.search(r"^VERSION = \((\d+), (\d+), (\d+)\)", source, re.M).groups())
VERSION_STR = f"{VERSION[0]}.{VERSION[1]}.{VERSION[2]}"
DESCRIPTION = re.search(r'^DESCRIPTION = "(.*)"', source, re.M).group(1)

setup(
    name="flagkit",
    version=VERSION_STR,
    python_requires='>=3.10',
    description=DESCRIPTION,
    packages=["flagkit"],
    install_requires=[
        "graphviz",
        "dataclasses-json",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "fk = flagkit:main",
            "flagkit = flagkit:main",
        ],
    },
    license="MIT",
    platforms="any",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
)
