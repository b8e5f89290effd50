'''
    ---------------------------------------------------------------------------
    Knee simulations: utilsOpenSim.py
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
'''

import os
import time
import logging
import numpy as np
import opensim

from constants import (kneePoses, tibialLoads, muscleGroups,
                       controllerExcitations)
from utils import print_and_log, format_angle

# %% Model.
def load_model(modelPath, plugins=[], logLevel='error'):

    opensim.Logger.setLevelString(logLevel)
    # Plugins register custom components (e.g., ligaments) used in the model.
    for plugin in plugins:
        opensim.LoadOpenSimLibrary(plugin)
    if not os.path.exists(modelPath):
        raise FileNotFoundError(modelPath)
    print_and_log('Loading model {}'.format(modelPath))

    return opensim.Model(modelPath)

def init_system(model):
    logging.info('Before initSystem() {}'.format(time.asctime()))
    state = model.initSystem()
    logging.info('After initSystem() {}'.format(time.asctime()))

    return state

def set_gravity(model, gravity):
    if gravity is None:
        return
    model.setGravity(opensim.Vec3(*[float(g) for g in gravity]))

# %% Forces.
def disable_all_forces(model, state):
    forceSet = model.getForceSet()
    for i in range(forceSet.getSize()):
        forceSet.get(i).setAppliesForce(state, False)

def enable_all_forces(model, state):
    forceSet = model.getForceSet()
    for i in range(forceSet.getSize()):
        forceSet.get(i).setAppliesForce(state, True)

def add_tibial_load(model, angleDegrees, bodyName='tibia_r'):

    if not angleDegrees in tibialLoads:
        raise ValueError('No tibial load for a knee angle of {} deg.'.format(
            angleDegrees))
    body = model.getBodySet().get(bodyName)
    prescribedForce = opensim.PrescribedForce(
        'prescribedForce_{}'.format(format_angle(angleDegrees)), body)
    fx, fy, fz = tibialLoads[angleDegrees]
    prescribedForce.setForceFunctions(
        opensim.Constant(fx), opensim.Constant(fy), opensim.Constant(fz))
    model.addForce(prescribedForce)

    return prescribedForce

def add_external_force(model, dataPath, name='externalTibialForce',
                       appliedToBody='tibia_upper_r',
                       forceExpressedInBody='ground',
                       pointExpressedInBody='tibia_upper_r',
                       forceIdentifier='force', pointIdentifier='point',
                       torqueIdentifier='torque'):

    if not os.path.exists(dataPath):
        raise FileNotFoundError(dataPath)
    # The force keeps a reference to its data source: the caller has to keep
    # the returned storage alive while the model is used.
    dataSource = opensim.Storage(dataPath)
    externalForce = opensim.ExternalForce()
    externalForce.setName(name)
    externalForce.set_applied_to_body(appliedToBody)
    externalForce.set_force_expressed_in_body(forceExpressedInBody)
    externalForce.set_point_expressed_in_body(pointExpressedInBody)
    externalForce.set_force_identifier(forceIdentifier)
    externalForce.set_point_identifier(pointIdentifier)
    externalForce.set_torque_identifier(torqueIdentifier)
    externalForce.setDataSource(dataSource)
    model.addForce(externalForce)

    return externalForce, dataSource

# %% Coordinates.
def set_knee_pose(model, state, angleDegrees, lockFlexion=True,
                  adductionOverride=None, lockAdduction=True):

    if not angleDegrees in kneePoses:
        raise ValueError('No knee pose for a knee angle of {} deg.'.format(
            angleDegrees))
    coordinateSet = model.getCoordinateSet()
    for coordinateName, value in kneePoses[angleDegrees].items():
        coordinate = coordinateSet.get(coordinateName)
        if value is None:
            value = coordinate.getDefaultValue()
        coordinate.setValue(state, value)

    if lockFlexion:
        coordinateSet.get('knee_angle_r').setLocked(state, True)
    adduction = coordinateSet.get('knee_adduction_r')
    if adductionOverride is not None:
        adduction.setValue(state, adductionOverride)
    if lockAdduction:
        adduction.setLocked(state, True)

def get_coordinates_in_multibody_order(model):
    coordinateOrder = []
    for coordinate in model.getCoordinateSet():
        coordinateOrder.append([coordinate.getBodyIndex(),
                                coordinate.getMobilizerQIndex(),
                                coordinate.getName()])

    return [c[2] for c in sorted(coordinateOrder)]

# %% Controllers.
def add_constant_controller(model, controllerType):

    if not controllerType in controllerExcitations:
        raise ValueError('Unknown controller {}. Options are {}.'.format(
            controllerType, ', '.join(controllerExcitations)))
    group, excitation = controllerExcitations[controllerType]
    muscles = muscleGroups[group]

    controller = opensim.PrescribedController()
    controller.setName('{}_controller'.format(controllerType))
    actuators = model.getActuators()
    for i in range(actuators.getSize()):
        actuator = actuators.get(i)
        controller.addActuator(actuator)
        if actuator.getName() in muscles:
            constFxn = opensim.Constant(excitation)
        else:
            constFxn = opensim.Constant(0)
        constFxn.setName(actuator.getName() + '_constFxn')
        controller.prescribeControlForActuator(actuator.getName(), constFxn)
    model.addController(controller)

    return controller

def add_flexion_controller(model):
    return add_constant_controller(model, 'flexion')

def add_extension_controller(model):
    return add_constant_controller(model, 'extension')

def get_excitation_functions(model, phases, values):

    actuators = model.getActuators()
    values = np.atleast_2d(values)
    if values.shape[0] != actuators.getSize():
        raise ValueError('{} excitation functions for {} actuators.'.format(
            values.shape[0], actuators.getSize()))

    functions = []
    for i in range(actuators.getSize()):
        controlFunc = opensim.PiecewiseLinearFunction()
        for t, v in zip(phases, values[i, :]):
            controlFunc.addPoint(float(t), float(v))
        controlFunc.setName('Excitation_' + actuators.get(i).getName())
        functions.append(controlFunc)

    return functions

def evaluate_function(function, times):
    return np.array([function.calcValue(opensim.Vector(1, float(t)))
                     for t in times])

def add_excitation_controller(model, phases, values,
                              name='knee_controller'):

    functions = get_excitation_functions(model, phases, values)
    controller = opensim.PrescribedController()
    controller.setName(name)
    actuators = model.getActuators()
    for i in range(actuators.getSize()):
        actuator = actuators.get(i)
        controller.addActuator(actuator)
        controller.prescribeControlForActuator(actuator.getName(),
                                               functions[i])
    model.addController(controller)

    return controller

# %% Integration.
def get_manager(model, accuracy=None):
    manager = opensim.Manager(model)
    manager.setIntegratorMethod(
        opensim.Manager.IntegratorMethod_RungeKuttaMerson)
    if accuracy is not None:
        manager.setIntegratorAccuracy(accuracy)

    return manager

def integrate(model, state, initialTime, finalTime, accuracy=None):

    manager = get_manager(model, accuracy)
    state.setTime(initialTime)
    manager.initialize(state)
    print_and_log('Integrating from {} to {}'.format(initialTime, finalTime))
    logging.info('Before integrate(si) {}'.format(time.asctime()))
    state = manager.integrate(finalTime)
    logging.info('After integrate(si) {}'.format(time.asctime()))

    return manager, state

def get_controls(model, state):
    model.realizeVelocity(state)
    controls = model.getControls(state)

    return np.array([controls.get(i) for i in range(controls.size())])

def integrate_with_control_log(model, state, initialTime, finalTime,
                               reportInterval, accuracy=None):

    manager = get_manager(model, accuracy)
    state.setTime(initialTime)
    manager.initialize(state)
    print_and_log('Integrating from {} to {}'.format(initialTime, finalTime))
    logging.info('Before integrate(si) {}'.format(time.asctime()))

    times, controls = [state.getTime()], [get_controls(model, state)]
    nIntervals = int(np.ceil((finalTime - initialTime) / reportInterval - 1e-9))
    for i in range(1, nIntervals + 1):
        t = min(initialTime + i * reportInterval, finalTime)
        state = manager.integrate(t)
        times.append(state.getTime())
        controls.append(get_controls(model, state))
    logging.info('After integrate(si) {}'.format(time.asctime()))

    return manager, state, np.array(times), np.array(controls)

# %% Results.
def print_storage(storage, path):
    storage.printToXML(path)
    logging.info('Wrote {}'.format(path))

def table_to_storage(table):

    columnLabels = opensim.ArrayStr()
    columnLabels.append('time')
    for label in table.getColumnLabels():
        columnLabels.append(label)
    storage = opensim.Storage()
    storage.setColumnLabels(columnLabels)
    times = table.getIndependentColumn()
    for i in range(table.getNumRows()):
        row = table.getRowAtIndex(i).to_numpy()
        storage.append(times[i], opensim.Vector(row.tolist()))
    storage.setInDegrees(False)

    return storage

def get_states_storage(manager):
    # Labeled by state variable paths, in radians.
    return table_to_storage(manager.getStatesTable())

def print_states(manager, model, pathRadians, pathDegrees):

    states = get_states_storage(manager)
    print_storage(states, pathRadians)
    statesDegrees = opensim.Storage(states)
    model.getSimbodyEngine().convertRadiansToDegrees(statesDegrees)
    statesDegrees.setWriteSIMMHeader(True)
    print_storage(statesDegrees, pathDegrees)

    return states

def get_storage_row(storage, index):
    stateVector = storage.getStateVector(index)
    data = stateVector.getData()

    return stateVector.getTime(), np.array(
        [data.get(i) for i in range(data.getSize())])

def set_state_from_storage(model, state, storage, index):
    t, values = get_storage_row(storage, index)
    # Reorder the columns to the model's state variable order.
    labels = storage.getColumnLabels()
    labels = [labels.get(i) for i in range(1, labels.getSize())]
    names = model.getStateVariableNames()
    names = [names.get(i) for i in range(names.getSize())]
    if len(labels) == values.shape[0] and all(n in labels for n in names):
        values = np.array([values[labels.index(n)] for n in names])
    model.setStateVariableValues(state, opensim.Vector(values.tolist()))
    state.setTime(t)

    return t
