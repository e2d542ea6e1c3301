from setuptools import setup

from app.__version__ import __version_string__

setup(
    name="PyChip8",
    version=__version_string__,
    description="CHIP-8 virtual machine with a threaded session scheduler",
    packages=["chip8", "util"],
    py_modules=["logger", "resources"],
    package_dir={"": "app"},
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "bitarray",
        "rich",
        "returns",
        "pygame-ce",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    zip_safe=False,
)
