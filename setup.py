"""Setup script for Azure RBAC Tools"""

from setuptools import setup, find_packages

setup(
    name="azure-rbac-tools",
    version="1.0.0",
    description="Least-privilege role lookup API for Azure RBAC and Entra ID",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn[standard]>=0.23.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "structlog>=23.1.0",
        "slowapi>=0.1.9",
        "prometheus-client>=0.18.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "hypothesis>=6.82.0",
            "httpx>=0.24.0",
        ]
    },
)
