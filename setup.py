from setuptools import setup, find_packages

# The information here can also be placed in setup.cfg - better separation of
# logic and declaration, and simpler if you include description/version in a file.
setup(
    name="highslazy",
    version="0.1.0",
    description="Lazy constraint and heuristic callbacks for binary programs solved with HiGHS",
    long_description="",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    zip_safe=False,
    extras_require={"test": ["pytest>=6.0"]},
    python_requires=">=3.9",
    install_requires=[
        "highspy>=1.10",
        "numpy",
    ],
)
