import setuptools

with open("bridgefs/.version") as f:
    version = f.read().strip()

setuptools.setup(
    name="bridgefs",
    version=version,
    python_requires=">=3.11.0",
    author="The bridgefs Authors",
    license="Apache-2.0",
    entry_points={"console_scripts": ["bridgefs = bridgefs.__main__:main"]},
    packages=["bridgefs"],
    package_data={"bridgefs": [".version", "py.typed"]},
    install_requires=[
        "appdirs",
        "click",
        "sortedcontainers",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
