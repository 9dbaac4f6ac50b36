"""Setup configuration for LifeBalance."""

from setuptools import find_packages, setup

setup(
    name="lifebalance",
    version="0.3.0",
    description="Life Balance Index — Explainable daily wellbeing scoring and next-day risk",
    author="LifeBalance",
    python_requires=">=3.11",
    packages=find_packages(where="src", include=["lifebalance*"]),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27.0",
        "numpy>=1.26.0",
        "pandas>=2.2.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        "pyarrow>=15.0.0",
    ],
    entry_points={
        "console_scripts": [
            "lifebalance=lifebalance.cli:cli_entry",
        ],
    },
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-mock>=3.12.0",
            "respx>=0.21.0",
            "python-dotenv>=1.0.0",
        ],
    },
)
