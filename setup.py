from setuptools import setup, find_packages

setup(
    name="graph-layout-engine",
    version="0.1.0",
    packages=find_packages(),
    install_requires=[
        "numpy",
        "networkx",
        "pydantic>=2",
        "fastapi",
        "uvicorn",
        "pandas",
        "shapely",
        "matplotlib",
        "seaborn"
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx"
        ]
    }
)
