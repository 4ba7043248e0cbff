from setuptools import setup, find_packages

setup(
    name='ocsp-staple-check',
    version='0.1.0',
    url='https://github.com/HQJaTu/ocsp-staple-check',
    license='GPLv2',
    author='Jari Turkia',
    author_email='jatu@hqcodeshop.fi',
    description='Library and CLI-tool to verify a stapled OCSP-response against trusted CA-certificates',
    classifiers=[
        # How mature is this project? Common values are
        #   3 - Alpha
        #   4 - Beta
        #   5 - Production/Stable
        'Development Status :: 3 - Alpha',

        # Indicate who your project is intended for
        'Intended Audience :: System Administrators',

        # Specify the Python versions you support here.
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12'
    ],
    python_requires='>=3.9, <4',
    install_requires=['pyOpenSSL>=23.2', 'cryptography>=43', 'pyasn1'],
    extras_require={
        'test': ['pytest']
    },
    scripts=['ocsp-staple-check.py'],
    packages=find_packages(exclude=['tests'])
)
