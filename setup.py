#!/usr/bin/env python3
"""
Setup script for the survey-export service

Packages live under backend/ and are installed as top-level modules:
export_shared, data_connector, tabular_sink, survey_export.
"""

from setuptools import find_packages, setup

setup(
    name="survey-export",
    version="1.0.0",
    package_dir={"": "backend"},
    packages=find_packages(
        where="backend",
        include=["export_shared*", "data_connector*", "tabular_sink*", "survey_export*"],
    ),
    python_requires=">=3.10",
    install_requires=[
        # 🚀 Web Framework
        "fastapi>=0.104.1",
        "uvicorn[standard]>=0.24.0",
        "httpx>=0.25.2",

        # 📋 Data Validation & Settings
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",

        # 🔗 Google APIs
        "google-auth>=2.27.0",
        "requests>=2.31.0",  # google-auth token refresh transport
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "survey-export=survey_export.main:main",
        ],
    },
)
