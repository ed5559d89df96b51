from setuptools import setup

setup(
    name='ircwire',
    version='0.3.0',
    packages=[
        'ircwire',
        'ircwire.features',
        'ircwire.features.rfc1459',
        'ircwire.features.ircv3',
        'ircwire.utils'
    ],
    python_requires='>=3.10',
    install_requires=['tornado'],
    extras_require={
        'tests': ['pytest', 'pytest-asyncio'],  # collect and run tests
        'coverage': 'pytest-cov'                # get test case coverage
    },
    entry_points={
        'console_scripts': [
            'ircwire-cat = ircwire.utils.irccat:main'
        ]
    },

    keywords='irc protocol parser client python3 asyncio',
    description='A client-side IRC wire protocol implementation: framing, parsing, classification and commands.',
    license='BSD',

    zip_safe=True,
    test_suite='tests'
)
