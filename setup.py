import setuptools
from setuptools import find_packages

with open("readme.md", "r") as fh:
    long_description = fh.read()


vars2find = ["__author__", "__version__", "__url__"]
vars2readme = {}
with open("./parkrun_helper/__init__.py") as f:
    for line in f.readlines():
        for v in vars2find:
            if line.startswith(v):
                line = line.replace(" ", "").replace('"', "").replace("'", "").strip()
                vars2readme[v] = line.split("=")[1]

core_deps = [
    "fastapi>=0.110.0",
    "uvicorn[standard]",
    "pydantic[email]>=2.0",
    "pydantic-settings>=2.0",
    "httpx>=0.25.0",
    "PyJWT[crypto]>=2.8.0",
    "cryptography>=41.0.0",
    "azure-cosmos>=4.5.0",
    "aiohttp>=3.9.0",
    "apscheduler>=3.10,<4",
    "prometheus-client>=0.17.0",
]

setuptools.setup(
    name="parkrun-helper",
    url=vars2readme["__url__"],
    version=vars2readme["__version__"],
    author=vars2readme["__author__"],
    description="Volunteer roster backend for Parkrun events: Azure AD auth and document store backups",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=core_deps,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
)
