from setuptools import setup


def get_install_requires():
    requires = [
        'python-dateutil',
    ]

    return requires


setup(
    name="xmlrpcbind",
    version="1.0.0",
    description=("XML-RPC codec that encodes native values and binds"
                 " decoded requests, responses and faults onto dataclass"
                 " records."),
    license="BSD",
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Libraries",
    ],
    packages=['xmlrpcbind'],
    python_requires='>=3.8',
    install_requires=get_install_requires(),
    extras_require={
        'tests': ['mock', 'pytest'],
    },
)
