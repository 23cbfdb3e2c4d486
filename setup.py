#! /usr/bin/env python
# -*- coding: utf-8 -*-

import os
from setuptools import find_packages, setup


def load_requirements(filename):
    basedir = os.path.dirname(os.path.abspath(__file__))
    with open(os.path.join(basedir, "requirements", filename), "r") as f:
        return [
            line.rstrip("\n")
            for line in f.readlines()
            if not line.startswith(("#", "-r")) and line.rstrip("\n")
        ]


install_requires = load_requirements("base.in")
test_requires = load_requirements("test.in")
build_requires = load_requirements("build.in")


trove_classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "License :: OSI Approved :: GNU General Public License (GPL)",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Natural Language :: English",
    "Programming Language :: Python",
    "Programming Language :: Python :: 3",
    "Topic :: Utilities",
    "Topic :: Software Development :: Libraries",
    "Topic :: Software Development :: Version Control",
    ]


setup(
    name="unicorn-guard",
    version="0.1.0",
    description="Serialization conflict checks for record saves",
    long_description=open("README.rst", "r").read(),
    license="GNU GPL",
    package_dir={"": "src"},
    packages=find_packages("src"),
    classifiers=trove_classifiers,
    python_requires=">=3.7",
    install_requires=install_requires,
    extras_require={
        "test": test_requires,
        "build": build_requires,
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "unicorn-guard = unicorn_guard.cli:_entry",
        ],
    },
)
