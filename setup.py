from setuptools import setup, find_packages

setup(
    name="edit-engine",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "edit-engine=edit_engine.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Token-level diffing, unified-diff hunks and transactional exact-string file edits.",
)
