from setuptools import setup, find_packages


setup(
    name="zipkit",
    version="0.1",
    packages=find_packages(include=["zipkit", "zipkit.*"]),
    description="A stateful ZIP archive handle with directory adding, per-entry AES encryption and extraction.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pyzipper>=0.3.6",
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "zipkit=zipkit.cli:main",
        ]
    },
)
