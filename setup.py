# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="cpp-amalgamate",
    version="0.1.0",
    description="Combine C++ source files and recursively inline their included headers",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["cpp_amalgamate*"]),
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'cpp-amalgamate=cpp_amalgamate.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: C++",
        "Operating System :: OS Independent",
    ],
)
