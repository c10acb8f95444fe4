import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name='merakiinfo',
    version='1.0.0',
    description='Report route tables, licenses, and device status of Meraki organizations and networks',
    long_description=long_description,
    long_description_content_type="text/markdown",
    license='MIT',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        'requests >= 2.27',
        'urllib3 >= 1.26',
        'inflect >= 5.3',
        'milc >= 1.6.6, < 2',
        'pyyaml >= 5.4',
        'tabulate >= 0.8',
        'pygments >= 2.11'
    ],
    extras_require={
        'test': [
            'pytest >= 7.0',
        ]
    },
    entry_points={
        'console_scripts': [
            'meraki-info = merakiinfo.ctl:cli',
        ]
    }
)
