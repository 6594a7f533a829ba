from setuptools import setup, find_packages

setup(
    name="ticket-availability-notify",
    version="0.1.0",
    description="Watch sold-out event pages and get notified when tickets become available",
    long_description=(
        "Polls event pages on an hourly schedule (every 15 minutes for events "
        "happening soon) and sends one WhatsApp, SMS, email or ntfy alert per "
        "sold-out to available transition."
    ),
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "httpx>=0.24.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "beautifulsoup4>=4.12.0",
        "apscheduler>=3.10.0,<4",
        "twilio>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.20.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ticketwatch=ticket_availability_notify.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Utilities",
    ],
    python_requires=">=3.9",
)
