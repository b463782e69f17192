# setup.py
from setuptools import setup, find_packages

setup(
    name="html_scout",
    version="0.1.0",
    description="HtmlScout: concurrent page fetcher that reports HTML comments and hidden fields",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"html_scout": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "yarl>=1.9",
        "httpx[http2]>=0.27",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "html-scout=html_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
