from setuptools import setup, find_packages

setup(
    name='rszkit',
    version='0.1.0',
    description='Decoder and encoder for RE Engine RSZ data, fchar, pfb and user files',
    packages=find_packages(include=['rszkit', 'rszkit.*']),
    python_requires='>=3.8',
    install_requires=['zstandard'],
    extras_require={'test': ['pytest']},
    entry_points={'console_scripts': ['rszkit=rszkit.cli:main']},
)
