"""
Setup script for lumi-engine.

Lumi is the personalization engine behind a children's tutoring
platform. It decides:

1. When a seen exercise should come back (SM-2 spaced review)
2. Which exercise or content variant to present next
3. How the learner is feeling, and what the tutor should do about it
4. How XP turns into levels and daily streaks

The 'lumi' command is a developer CLI over a local SQLite state store.
"""

from setuptools import find_packages, setup

setup(
    name="lumi-engine",
    version="0.1.0",
    description="Adaptive learning personalization engine for a children's tutoring platform",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lumi=lumi.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 gamification education adaptive",
)
