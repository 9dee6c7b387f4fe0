from setuptools import setup, find_packages

setup(
    name="risklib",
    version="0.1.0",
    description="Risk-aware portfolio optimization with pluggable risk measures",
    author="RiskLib Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "rich>=13.0.0",
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "pyyaml>=6.0",
        "scipy>=1.10.0",
        "tabulate>=0.9.0",
    ],
    extras_require={
        'plot': ['matplotlib>=3.7.0'],
        'test': ['pytest>=7.0.0'],
    },
    entry_points={
        'console_scripts': [
            'risklib=risklib.main:main',
        ],
    },
    python_requires='>=3.8',
)
