""" streakipy - tools and library for a habit tracker restful API"""
from setuptools import setup

INSTALL_REQUIRES = [
    'plumbum',
    'requests',
]

setup(
    name='streakipy',
    version='0.1.0',
    license='MIT',
    description='tools and library for a habit tracker restful API',
    packages=['streakipy'],
    python_requires='>=3.9',
    install_requires=INSTALL_REQUIRES,
    package_data={
        'streakipy': [
            'i18n/*/LC_MESSAGES/*.mo'
        ]
    },
    entry_points={
        'console_scripts': [
            'streakipy = streakipy.cli:StreakipyCli',
        ],
    },
    extras_require={
        'aio':  ['aiohttp'],
        'test': ['pytest', 'responses', 'hypothesis', 'aiohttp'],
    },
    classifiers=[
        'License :: OSI Approved :: MIT License',
        'Development Status :: 4 - Beta',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: Utilities',
        'Topic :: Internet',
        'Environment :: Console',
        'Operating System :: OS Independent',
        'Intended Audience :: Developers',
        'Intended Audience :: End Users/Desktop',
    ],
)
