from setuptools import setup, find_packages

setup(
    name="scpDetector",
    version="1.0.0",
    description="SCP identifier recognition and page classification for web documents",
    author="Your Name",
    author_email="you@example.com",
    packages=find_packages(include=["scpDetector", "scpDetector.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "beautifulsoup4>=4.12",
        "soupsieve>=2.4",
        "lxml>=4.9",
        "PyYAML>=6.0",
        "tabulate>=0.8.9",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["scpDetector=scpDetector.cli:main"],
    },
    license="MIT",
)
