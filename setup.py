"""
Setup configuration for TransTrack
"""
from setuptools import setup, find_packages

setup(
    name="transtrack",
    version="1.0.0",
    description="Document translation job tracker",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn[standard]>=0.22.0",
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "structlog>=23.1.0",
        "python-jose[cryptography]>=3.3.0",
        "passlib>=1.7.4",
        "httpx>=0.24.0",
        "arq>=0.25.0",
        "redis>=5.0.1",
        "orjson>=3.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "pytest-asyncio>=0.21.0",
        ],
        "dev": [
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "transtrack=transtrack.main:main",
        ],
    },
)
