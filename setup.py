from setuptools import setup, find_packages

setup(
    name="playwright-scraper-api",
    version="1.0.0",
    description="REST API for headless-browser scraping with caching and resource blocking",
    packages=find_packages(exclude=["tests*"]),
    package_data={"scraper_api": ["config/*.yaml"]},
    include_package_data=True,
    install_requires=[
        "playwright>=1.40.0",
        "playwright-stealth>=2.0.0",
        "pyyaml>=6.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "structlog>=23.0.0",
        "tenacity>=8.2.0",
        "python-dotenv>=1.0.0",
        "psutil>=5.9.0",
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.25.0",
            "mypy>=1.5.0",
            "black>=23.7.0",
            "flake8>=6.0.0",
            "isort>=5.12.0",
        ]
    },
    python_requires=">=3.9",
)
