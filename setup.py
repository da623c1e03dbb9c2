#!/usr/bin/env python
"""metareg setup script."""
import os.path as op

from setuptools import find_packages, setup


def main():
    """Install entry-point."""
    info_file = op.join(op.dirname(op.abspath(__file__)), "metareg", "info.py")
    ldict = {"__file__": info_file}
    with open(info_file) as f:
        exec(f.read(), ldict)

    setup(
        name=ldict["PACKAGENAME"],
        version=ldict["VERSION"],
        description=ldict["DESCRIPTION"],
        long_description=ldict["LONGDESC"],
        long_description_content_type=ldict["LONGDESCCONTTYPE"],
        author=ldict["AUTHOR"],
        license=ldict["LICENSE"],
        classifiers=ldict["CLASSIFIERS"],
        python_requires=">=3.8",
        install_requires=ldict["REQUIRES"],
        extras_require=ldict["EXTRA_REQUIRES"],
        packages=find_packages(exclude=("tests",)),
        package_data={"metareg": ["resources/datasets/*"]},
        zip_safe=False,
    )


if __name__ == "__main__":
    main()
