"""
Setup configuration for proofdesk package.
"""

from setuptools import setup, find_packages

setup(
    name="proofdesk",
    version="0.1.0",
    description="Ad proof review and approval: versioned mock ads, share links and client sign-off",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "supabase>=2.0",
        "postgrest",
        "httpx",
        "python-dotenv",
        "pydantic>=2.0",
        "fastapi",
        "uvicorn",
        "slowapi",
        "click>=8.0",
        "resend",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "proofdesk=proofdesk.cli.main:cli",
        ],
    },
)
