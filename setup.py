from setuptools import setup

setup(
    name='ircsession',
    version='0.3.0',
    packages=[
        'ircsession',
        'ircsession.utils'
    ],
    install_requires=['tornado'],
    extras_require={
        'tests': ['pytest', 'pytest-asyncio'],   # collect and run tests
        'coverage': 'pytest-cov'                 # get test case coverage
    },
    entry_points={
        'console_scripts': [
            'ircsession = ircsession.utils.run:main',
            'ircsession-cat = ircsession.utils.irccat:main'
        ]
    },

    keywords='irc session protocol library python3 event-driven',
    description='An event-driven IRC protocol session engine: line framing, message parsing, registration and buffers.',
    license='BSD',

    zip_safe=True,
    test_suite='tests'
)
