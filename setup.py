from setuptools import setup, find_packages

setup(
    name="frameattest",
    version="0.1.0",
    description="Farcaster frame that attests cast engagement on Base via the Ethereum Attestation Service",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "fastapi>=0.110.0",
        "starlette>=0.36.0",
        "pydantic>=2.0",
        "httpx>=0.27.0",
        "uvicorn>=0.27.0",
        "slowapi>=0.1.9",
        "python-json-logger>=3.1.0",
        "asyncpg>=0.29.0",
        "web3>=7.0.0",
        "eth-account>=0.13.0",
        "eth-abi>=5.0.0",
        "aiohttp>=3.9.0",
    ],
    extras_require={"dev": ["pytest>=7.0", "pytest-asyncio>=0.23"]},
    entry_points={"console_scripts": ["frameattest=frameattest.cli:main"]},
    python_requires=">=3.10",
    license="CC0-1.0",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "License :: CC0 1.0 Universal (CC0 1.0) Public Domain Dedication",
        "Programming Language :: Python :: 3",
    ],
    keywords="farcaster frames eas attestation base web3",
)
