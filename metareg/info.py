"""Package metadata, requirements and extras."""

import os.path as op

VERSION = "0.1.0"

readme_file = op.join(op.dirname(op.dirname(__file__)), "README.md")
if op.isfile(readme_file):
    with open(readme_file, encoding="utf-8") as f:
        longdesc = f.read()
else:
    longdesc = ""

AUTHOR = "metareg developers"
COPYRIGHT = "Copyright 2026--now, metareg developers"
LICENSE = "MIT"
STATUS = "Prototype"
PACKAGENAME = "metareg"
DESCRIPTION = "metareg: meta-regression of risk ratios from two-by-two tables"
LONGDESC = longdesc
LONGDESCCONTTYPE = "text/markdown"

REQUIRES = [
    "numpy>=1.20",
    "scipy>=1.7",
    "pandas",
    "sympy",
    "wrapt",
]

TESTS_REQUIRES = [
    "coverage",
    "flake8",
    "pytest",
    "pytest-cov",
]

DOC_REQUIRES = [
    "sphinx",
    "sphinx_rtd_theme",
    "numpydoc",
    "matplotlib",
]

EXTRA_REQUIRES = {
    "doc": DOC_REQUIRES,
    "tests": TESTS_REQUIRES,
}

# Enable a handle to install all extra dependencies at once
EXTRA_REQUIRES["all"] = list(set([v for deps in EXTRA_REQUIRES.values() for v in deps]))

# Package classifiers
CLASSIFIERS = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "License :: OSI Approved :: MIT License",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Topic :: Scientific/Engineering",
]
