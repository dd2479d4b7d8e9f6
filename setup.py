import setuptools

setuptools.setup(
    name="bdpflow",
    version="0.1.0",
    description="TCP round-trip time and delivery rate estimation from packet captures",
    long_description=open("README.rst").read(),
    long_description_content_type="text/x-rst",
    license="BSD-3-Clause",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    package_data={"bdpflow": ["py.typed"]},
    install_requires=[
        "dpkt>=1.9.8",
        "matplotlib>=3.5",
    ],
    extras_require={
        "dev": [
            "coverage[toml]>=7.2.2",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Networking :: Monitoring",
    ],
)
