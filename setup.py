from setuptools import setup, find_packages

setup(
    name="metaloader",
    version="0.1.0",
    packages=find_packages(include=["metaloader", "metaloader.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click",
        "psycopg2-binary",
        "python-dotenv",
        "pandas",
        "pydantic>=2",
        "rich",
        "sqlalchemy>=2",
        "toml",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "metaloader = metaloader.main:start_cli",
        ],
    },
    author="Joel M",
    author_email="jtmcn.dev@gmail.com",
    description="A command-line tool for loading delimited files into database tables from named load configurations.",
    license="MIT",
    keywords="csv etl database postgresql",
)
