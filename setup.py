from setuptools import find_packages, setup

__version__ = '0.1.0'


setup(
  name='offerloop',
  version=__version__,
  description='Quota-driven scheduler framework for offer-based cluster managers',
  license='Apache License 2.0',
  packages=find_packages(exclude=['tests']),
  python_requires='>=3.7',
  install_requires=[],
  extras_require={
    'test': [
      'mock',
      'pytest',
    ],
  },
  zip_safe=True
)
