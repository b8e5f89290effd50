# -*- coding: utf-8 -*-
"""
Default setups of the knee simulations.

Each setup is a plain dict; user settings (e.g., from a yaml file) override
the defaults key by key.
"""

import copy
import os

simulationTypes = ['forward', 'anterior_load', 'static_optimization',
                   'inverse', 'activations']

def get_default_setup(simulation_type):

    if simulation_type not in simulationTypes:
        raise ValueError('Unknown simulation type {}. Options are {}.'.format(
            simulation_type, ', '.join(simulationTypes)))

    # Settings shared by all simulations.
    setup = {
        'model_path': os.path.join(
            'resources', 'geometries',
            'closed_knee_ligaments_0_3 - post_ant_load_2.osim'),
        'output_dir': 'outputs',
        'plugins': [],
        'opensim_log_level': 'error',
        'integrator_accuracy': None,
        'side': 'r'}

    setups = {}
    # Muscle-driven knee flexion under gravity.
    setups['forward'] = {
        'gravity': [-9.80665, 0, 0],
        'initial_time': 0.0,
        'final_time': 0.2,
        'controller': 'flexion',
        'knee_angle': None,
        'case': 'flex'}

    # Constant anterior tibial load with locked flexion and adduction.
    setups['anterior_load'] = {
        'gravity': [0, 0, 0],
        'initial_time': 0.0,
        'final_time': 1.0,
        'knee_angle': -90,
        'adduction_override': -0.05235,
        'external_loads': [],
        'case': 'ant_load_{}'}

    # Static optimization across a knee flexion sweep.
    setups['static_optimization'] = {
        'gravity': None,
        'initial_knee_angle': -0.0290726,
        'knee_angle_step': -1.0/20,
        'n_frames': 20,
        'frame_time_step': 0.1,
        'output_files': {'activations': 'so_acts.sto',
                         'forces': 'so_forces.sto'}}

    # Inverse dynamics at the initial state.
    setups['inverse'] = {
        'gravity': None,
        'duration': 1.0,
        'time_step': 0.001,
        'output_files': {'generalized_forces': 'inverse_dynamics.sto'}}

    # Forward simulation driven by excitations derived from steady-state
    # activations.
    setups['activations'] = {
        'gravity': [0, -9.9, 0],
        'initial_time': 0.0,
        'final_time': 2.0,
        'knee_angle': -1.0,
        'dummy_final_time': 2.0,
        'excitation_sampling_step': 0.001,
        'report_interval': 0.001,
        'store_excitations': True,
        'output_files': {
            'states': 'kneeforwsim_states.sto',
            'states_degrees': 'kneeforwsim_states_degrees.mot',
            'force_reporter': 'force_reporter_kneeforwsim.mot',
            'excitations': '_Excitations_LOG.sto',
            'control_log': 'force_Excitations_LOG.sto'}}

    setup.update(copy.deepcopy(setups[simulation_type]))
    setup['simulation'] = simulation_type

    return setup

def get_setup(simulation_type, user_settings=None):

    settings = get_default_setup(simulation_type)
    if user_settings:
        unknownKeys = [k for k in user_settings if not k in settings]
        if unknownKeys:
            raise ValueError('Unknown settings for {}: {}'.format(
                simulation_type, ', '.join(sorted(unknownKeys))))
        for key, value in user_settings.items():
            if isinstance(value, dict) and isinstance(settings[key], dict):
                settings[key].update(value)
            else:
                settings[key] = value

    return settings
