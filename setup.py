"""
1. pip3 install setuptools
2. python3 setup.py build
3. python3 -m unittest discover tests
"""

from setuptools import setup,find_packages
setup(
    name='chainFixtures',
    version='0.1.0',
    description='Randomized, protocol-valid bitcoin transaction fixtures',
    install_requires=['base58>=2.0.0','ecdsa>=0.16','pycryptodome>=3.9','hypothesis>=6.0'],
    extras_require={'test': ['pytest>=6.0']},
    python_requires='>=3.6.7',
    packages=find_packages(exclude=['tests', 'tests.*'])
  )
