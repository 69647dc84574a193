import os
import re

from setuptools import setup, find_packages

with open(os.path.join('natupnp', '__init__.py')) as f:
    version = re.search(r'^__version__ = "([^"]+)"', f.read(), re.M).group(1)

setup(name='natupnp',
    version=version,
    description='UPnP Internet Gateway Device port mapping client for Twisted',
    license='LGPL',
    packages=find_packages(include=['natupnp', 'natupnp.*']),
    python_requires='>=3.8',
    install_requires=[
        'Twisted>=21.2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
