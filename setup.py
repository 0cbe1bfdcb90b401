from setuptools import find_packages, setup

setup(
    name='bulk-editor-updater',
    version='1.0.0',
    description='Batch-mode bulk updater for editor projects',
    packages=find_packages(exclude=[
        'bulkupdater.test',
        'bulkupdater.test.*',
    ]),
    python_requires='>=3.8',
    install_requires=[
        'chardet',
        'python-dateutil',
        'simplejson',
    ],
    extras_require={
        'test': [
            'mock',
            'pytest',
        ],
    },
    entry_points={
        "console_scripts": [
            "bulkupdate = bulkupdater.main:main",
        ],
    }
)
