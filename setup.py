from setuptools import setup, find_packages

setup(
    name="wcsview",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "astropy",
        "Pillow",
        "matplotlib",
        "customtkinter",
        "logpool",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "wcsview=wcsview.main:main",  # Entry point for CLI
        ],
    },
    description="FITS image viewer with a WCS-aligned view transform",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
)
