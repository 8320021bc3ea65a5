from setuptools import setup, find_packages

setup(
    name="setpointopt",
    version="0.1.0",
    description="Objective functions for HVAC setpoint schedule optimization",
    packages=find_packages(include=["setpointopt", "setpointopt.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
