from setuptools import setup, find_packages

INSTALL_REQUIRES = [
    "pydantic>=2.8.0,<3.0.0",
    "pydantic-settings>=2.2",
    "sqlalchemy[asyncio]>=2.0",
    "typing-extensions>=4.6.0",
    "structlog>=24.1",
    "strawberry-graphql>=0.243",
    "litestar>=2.8",
    "aiosqlite>=0.19",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest>=8.0",
        "pytest-asyncio>=0.23",
        "httpx>=0.25",
    ],
}

setup(
    name="graph-repository",
    version="0.1.0",
    description="Filtered, sorted and cursor-paged GraphQL entity sets on top of SQLAlchemy repositories.",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.10,<3.14',
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
