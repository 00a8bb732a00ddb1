from io import open

from setuptools import find_packages, setup

version = "0.0.1"
setup(
    name="markerseq",
    version=version,
    description="Interval-indexed store of genomic marker sequences",
    license="BSD 3-Clause",
    long_description=open("README.rst").read(),
    install_requires=[
        'click',
        'click-log',
        'intervaltree',
        'numpy',
        'pandas',
        'pyyaml',
        'tqdm',
    ],
    tests_require=["coverage", "pytest"],
    extras_require={"test": ["coverage", "pytest"]},
    python_requires=">=3.8",
    packages=find_packages(),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: BSD License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: Implementation :: CPython",
    ],
    entry_points={"console_scripts": ["markerseq=markerseq.__main__:main_entry"]},
    include_package_data=True,
)
