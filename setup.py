from setuptools import setup

setup(
	name='lockhinter',
	version='0.1.0',
	description='Keep the logind LockedHint in sync with a screen locker',
	packages=['lockhinter'],
	package_dir={'':'src'},
	python_requires='>=3.10',
	install_requires=[
		'dbus-python',
	],
	extras_require={
		'test': [
			'pytest',
		],
	},
	entry_points={
		'console_scripts': [
			'lockhinter=lockhinter:main',
		]
	}
)
