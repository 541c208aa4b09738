# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="solcockpit",
    version="1.0.0",
    description="Solidity workspace cockpit: file trees, function call traces and public method listings",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["solcockpit*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'solcockpit=solcockpit.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
