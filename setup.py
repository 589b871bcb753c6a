from setuptools import setup, find_packages

setup(
    name="quickfix",
    version="1.2.0",
    description="IT QuickFix: macOS support and maintenance toolkit",
    packages=find_packages(include=["quickfix", "quickfix.*"]),
    package_data={
        "quickfix": ["default_config.yaml"],
    },
    install_requires=[
        "requests",
        "pyyaml",
        "colorama",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "quickfix=quickfix.cli:main",
        ],
    },
    python_requires=">=3.8",
)
