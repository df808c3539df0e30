"""
Setup script for the mission-match project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_namespace_packages

setup(
    name="mission-match",
    version="0.1.0",
    packages=find_namespace_packages(include=["src*", "match_service*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "pymongo>=4.6",
        "python-dotenv>=1.0",
        "langchain-core>=0.2",
        "langchain-openai>=0.1",
        "tenacity>=8.2",
        "json-repair>=0.25",
        "numpy>=1.26",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "pytest-mock>=3.12",
            "httpx>=0.27",
        ],
    },
)
