'''
    ---------------------------------------------------------------------------
    Knee simulations: utilsKneeSimulations.py
    ---------------------------------------------------------------------------

    Copyright 2022 the Authors

    Licensed under the Apache License, Version 2.0 (the "License"); you may not
    use this file except in compliance with the License. You may obtain a copy
    of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.

    Forward simulations, static optimization, and inverse dynamics of the
    knee model. Every simulation takes a loaded model and a settings dict
    (see settingsKneeSimulations.py) and returns the paths of the files it
    wrote.
'''

import logging
import numpy as np
import opensim

from constants import outputFiles
from settingsKneeSimulations import get_setup
from utils import (print_and_log, format_angle, get_output_path,
                   numpy_to_storage)
from utilsControls import (get_excitation_phases, get_excitation_values,
                           get_sample_times, sort_and_deduplicate_control_log)
from utilsKneeLoading import kneeLoading
import utilsOpenSim

def _get_settings(simulation_type, settings):
    if settings is None:
        return get_setup(simulation_type)
    return settings

def _print_results(model, manager, forceReporter, settings, case):

    outputDir = settings['output_dir']
    outputs = {}
    outputs['states'] = get_output_path(outputDir, outputFiles['states'], case)
    outputs['states_degrees'] = get_output_path(
        outputDir, outputFiles['states_degrees'], case)
    utilsOpenSim.print_states(manager, model, outputs['states'],
                              outputs['states_degrees'])

    # Force reporter results.
    outputs['force_reporter'] = get_output_path(
        outputDir, outputFiles['force_reporter'], case)
    utilsOpenSim.print_storage(forceReporter.getForceStorage(),
                               outputs['force_reporter'])

    # Knee loading results.
    outputs['custom_reporter'] = get_output_path(
        outputDir, outputFiles['custom_reporter'], case)
    reporter = kneeLoading(model, manager.getStatesTable(),
                           side=settings['side'])
    reporter.print_to_file(outputs['custom_reporter'])

    return outputs

# %% Forward simulation with constant muscle excitations.
def forwardSimulation(model, settings=None):

    settings = _get_settings('forward', settings)

    if settings['controller'] is not None:
        utilsOpenSim.add_constant_controller(model, settings['controller'])
    utilsOpenSim.set_gravity(model, settings['gravity'])

    # Add reporters.
    forceReporter = opensim.ForceReporter(model)
    model.addAnalysis(forceReporter)

    state = utilsOpenSim.init_system(model)
    if settings['knee_angle'] is not None:
        utilsOpenSim.set_knee_pose(model, state, settings['knee_angle'],
                                   lockFlexion=False, lockAdduction=False)
    model.equilibrateMuscles(state)

    manager, state = utilsOpenSim.integrate(
        model, state, settings['initial_time'], settings['final_time'],
        accuracy=settings['integrator_accuracy'])

    return _print_results(model, manager, forceReporter, settings,
                          settings['case'])

# %% Forward simulation with an anterior tibial load.
def anteriorTibialLoadsFD(model, settings=None):

    settings = _get_settings('anterior_load', settings)
    kneeAngle = settings['knee_angle']
    case = settings['case'].format(format_angle(kneeAngle))

    # Add external forces.
    utilsOpenSim.add_tibial_load(model, kneeAngle)
    dataSources = []
    for externalLoad in settings['external_loads']:
        _, dataSource = utilsOpenSim.add_external_force(model, **externalLoad)
        dataSources.append(dataSource)
    utilsOpenSim.set_gravity(model, settings['gravity'])

    # Add reporters.
    forceReporter = opensim.ForceReporter(model)
    model.addAnalysis(forceReporter)

    state = utilsOpenSim.init_system(model)
    utilsOpenSim.set_knee_pose(
        model, state, kneeAngle, lockFlexion=True,
        adductionOverride=settings['adduction_override'], lockAdduction=True)
    model.equilibrateMuscles(state)

    manager, state = utilsOpenSim.integrate(
        model, state, settings['initial_time'], settings['final_time'],
        accuracy=settings['integrator_accuracy'])

    return _print_results(model, manager, forceReporter, settings, case)

# %% Static optimization across a knee flexion sweep.
def staticOptimization(model, settings=None):

    settings = _get_settings('static_optimization', settings)
    utilsOpenSim.set_gravity(model, settings['gravity'])
    state = utilsOpenSim.init_system(model)

    # Create the state sequence of motion (knee flexion).
    states = opensim.Storage()
    states.setDescription('Knee flexion')
    stateNames = model.getStateVariableNames()
    stateNames.insert(0, 'time')
    states.setColumnLabels(stateNames)

    kneeAngle = model.getCoordinateSet().get('knee_angle_r')
    knee_angle_r = settings['initial_knee_angle']
    t = 0.0
    for i in range(settings['n_frames']):
        knee_angle_r += settings['knee_angle_step']
        kneeAngle.setValue(state, knee_angle_r)
        states.append(t, model.getStateVariableValues(state))
        t += settings['frame_time_step']
    states.setInDegrees(False)

    # Perform the static optimization.
    so = opensim.StaticOptimization(model)
    so.setStatesStore(states)
    ns = states.getSize()
    so.setStartTime(states.getFirstTime())
    so.setEndTime(states.getLastTime())

    state = model.initSystem()
    for i in range(ns):
        utilsOpenSim.set_state_from_storage(model, state, states, i)
        model.assemble(state)
        model.realizeVelocity(state)
        if i == 0:
            so.begin(state)
        elif i == ns - 1:
            so.end(state)
        else:
            so.step(state, i)

    outputDir = settings['output_dir']
    outputs = {}
    outputs['activations'] = get_output_path(
        outputDir, settings['output_files']['activations'])
    utilsOpenSim.print_storage(so.getActivationStorage(),
                               outputs['activations'])
    outputs['forces'] = get_output_path(
        outputDir, settings['output_files']['forces'])
    utilsOpenSim.print_storage(so.getForceStorage(), outputs['forces'])

    return outputs

# %% Inverse dynamics.
def inverseSimulation(model, settings=None):

    settings = _get_settings('inverse', settings)
    utilsOpenSim.set_gravity(model, settings['gravity'])

    # Time series of the (static) motion.
    nTimes = int(settings['duration'] / settings['time_step']) + 1
    times = settings['time_step'] * np.arange(nTimes)
    logging.info('Inverse dynamics over {} time points ({} to {} s).'.format(
        nTimes, times[0], times[-1]))

    # Solve for generalized joint forces.
    ids = opensim.InverseDynamicsSolver(model)
    state = utilsOpenSim.init_system(model)
    udot = opensim.Vector(state.getNU(), 0.0)
    idsResults = ids.solve(state, udot)
    generalizedForces = np.array(
        [idsResults.get(i) for i in range(idsResults.size())])
    for i, value in enumerate(generalizedForces):
        print_and_log('{} : {}'.format(i, value))

    # Coordinates in multibody order match the mobilities when no
    # quaternions are used.
    labels = utilsOpenSim.get_coordinates_in_multibody_order(model)
    if len(labels) != generalizedForces.shape[0]:
        labels = ['u_{}'.format(i) for i in range(generalizedForces.shape[0])]
    outputs = {}
    outputs['generalized_forces'] = get_output_path(
        settings['output_dir'],
        settings['output_files']['generalized_forces'])
    numpy_to_storage(['time'] + labels,
                     np.concatenate(([state.getTime()], generalizedForces)),
                     outputs['generalized_forces'], datatype='ID')

    return outputs

# %% Steady-state activations.
def calcSSact(model, state, settings=None):
    """Returns the steady state activations needed to overcome the passive
    forces at the pose in state, along with the re-initialized state loaded
    with that pose.
    """

    settings = _get_settings('activations', settings)

    # Perform a dummy forward simulation without forces, just to obtain a
    # state-series to be used by static optimization.
    utilsOpenSim.disable_all_forces(model, state)
    manager, state = utilsOpenSim.integrate(
        model, state, 0.0, settings['dummy_final_time'],
        accuracy=settings['integrator_accuracy'])
    utilsOpenSim.enable_all_forces(model, state)

    # Perform a quick static optimization.
    states = utilsOpenSim.get_states_storage(manager)
    so = opensim.StaticOptimization(model)
    so.setStatesStore(states)
    state = model.initSystem()
    utilsOpenSim.set_state_from_storage(model, state, states, 0)
    state.setTime(0)
    so.begin(state)
    so.end(state)

    activationStorage = so.getActivationStorage()
    na = model.getActuators().getSize()
    _, row = utilsOpenSim.get_storage_row(activationStorage,
                                          activationStorage.getSize() - 1)

    return row[:na], state

def computeActivations(model, angle, state, store=True, settings=None):

    settings = _get_settings('activations', settings)

    so_activ_init, state = calcSSact(model, state, settings)

    # Set movement parameters.
    model.getCoordinateSet().get('knee_angle_r').setValue(state, angle)
    model.equilibrateMuscles(state)

    so_activ_final, state = calcSSact(model, state, settings)

    # Construct control functions.
    phases, duration = get_excitation_phases(angle)
    values = get_excitation_values(so_activ_init, so_activ_final)
    actuators = model.getActuators()
    names = ['Excitation_' + actuators.get(i).getName()
             for i in range(actuators.getSize())]
    controlFunctions = {'phases': phases, 'values': values, 'names': names}

    if store:
        path = get_output_path(settings['output_dir'],
                               settings['output_files']['excitations'])
        # Sample the functions that drive the actuators.
        functions = utilsOpenSim.get_excitation_functions(model, phases, values)
        times = get_sample_times(duration,
                                 settings['excitation_sampling_step'])
        data = np.column_stack([utilsOpenSim.evaluate_function(f, times)
                                for f in functions])
        numpy_to_storage(['time'] + names,
                         np.concatenate((times[:, None], data), axis=1),
                         path, datatype='excitations')
        controlFunctions['path'] = path

    return controlFunctions, duration, so_activ_init, so_activ_final

# %% Forward simulation driven by the excitations.
def forwardSim(model, settings=None):

    settings = _get_settings('activations', settings)
    utilsOpenSim.set_gravity(model, settings['gravity'])
    state = utilsOpenSim.init_system(model)

    # Compute muscle activations for a specific knee angle (rad).
    controlFunctions, duration, _, _ = computeActivations(
        model, settings['knee_angle'], state,
        store=settings['store_excitations'], settings=settings)
    print_and_log('Excitation pattern lasts {:.4f} s.'.format(duration))

    # Add controller to the model after adding the control functions.
    utilsOpenSim.add_excitation_controller(
        model, controlFunctions['phases'], controlFunctions['values'])

    # Add reporters.
    forceReporter = opensim.ForceReporter(model)
    model.addAnalysis(forceReporter)

    # Set model to initial state.
    state = utilsOpenSim.init_system(model)

    manager, state, times, controls = (
        utilsOpenSim.integrate_with_control_log(
            model, state, settings['initial_time'], settings['final_time'],
            settings['report_interval'],
            accuracy=settings['integrator_accuracy']))

    # Save the simulation results.
    outputDir = settings['output_dir']
    outputFileNames = settings['output_files']
    outputs = {}
    outputs['states'] = get_output_path(outputDir, outputFileNames['states'])
    outputs['states_degrees'] = get_output_path(
        outputDir, outputFileNames['states_degrees'])
    utilsOpenSim.print_states(manager, model, outputs['states'],
                              outputs['states_degrees'])
    outputs['force_reporter'] = get_output_path(
        outputDir, outputFileNames['force_reporter'])
    utilsOpenSim.print_storage(forceReporter.getForceStorage(),
                               outputs['force_reporter'])

    # Activation trajectory.
    times, controls = sort_and_deduplicate_control_log(times, controls)
    outputs['control_log'] = get_output_path(
        outputDir, outputFileNames['control_log'])
    numpy_to_storage(['time'] + controlFunctions['names'],
                     np.concatenate((times[:, None], controls), axis=1),
                     outputs['control_log'], datatype='excitations')
    if 'path' in controlFunctions:
        outputs['excitations'] = controlFunctions['path']

    return outputs
