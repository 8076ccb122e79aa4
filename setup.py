from setuptools import setup, find_packages

setup(
    name="chatpatch",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
        "watchdog>=3.0",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "chatpatch=chatpatch.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Turns AI chat responses into precise, minimal file patches.",
)
