# setup.py
from setuptools import setup, find_packages

setup(
    name="edge_esi",
    version="0.1.0",
    description="Минимальная обработка Edge Side Includes для aiohttp",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "multidict>=6.0",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.0",
    ],
    extras_require={
        "test": ["pytest>=7.0", "pytest-asyncio>=0.23"],
    },
    entry_points={
        "console_scripts": ["edge-esi=edge_esi.cli:cli"],
    },
    python_requires=">=3.11",
)
