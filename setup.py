from setuptools import setup, find_packages

setup(
    name="ai-secretary",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "ai-secretary=ai_secretary.cli:main",
        ],
    },
    description="Edit documents with natural-language requests through an LLM agent.",
)
