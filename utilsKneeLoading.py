'''
    ---------------------------------------------------------------------------
    Knee simulations: utilsKneeLoading.py
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

import numpy as np
import pandas as pd
import opensim

from constants import kneeCoordinates, kneeForceClasses
from utils import lowPassFilter, numpy_to_storage

def is_knee_force(forceName, className, side='r'):
    return (className in kneeForceClasses and
            forceName.endswith('_{}'.format(side)))

class kneeLoading:
    """Replays the states table of a simulation and reports the knee
    coordinates, the records of the ligament and contact forces of one knee,
    and the muscle forces.
    """

    def __init__(self, model, statesTable, side='r'):

        self.model = model
        self.side = side

        # States in radians, as recorded by the Manager.
        self.stateTrajectory = opensim.StatesTrajectory.createFromStatesTable(
            self.model, statesTable)
        self.nStates = self.stateTrajectory.getSize()
        self.time = np.array([self.stateTrajectory.get(i).getTime()
                              for i in range(self.nStates)])

        # Coordinates.
        self.coordinateSet = self.model.getCoordinateSet()
        coordinateNames = [self.coordinateSet.get(i).getName()
                           for i in range(self.coordinateSet.getSize())]
        suffix = '_{}'.format(side)
        self.coordinates = [c[:-2] + suffix for c in kneeCoordinates
                            if c[:-2] + suffix in coordinateNames]

        # Ligaments and contacts.
        forceSet = self.model.getForceSet()
        self.forces = []
        for i in range(forceSet.getSize()):
            force = forceSet.get(i)
            if is_knee_force(force.getName(), force.getConcreteClassName(),
                             side):
                self.forces.append(force)

        # Muscles.
        self.muscles = self.model.getMuscles()
        self.muscleNames = [self.muscles.get(i).getName()
                            for i in range(self.muscles.getSize())]

    def get_coordinate_values(self, in_degrees=True,
                              lowpass_cutoff_frequency=-1):

        values = np.zeros((self.nStates, len(self.coordinates)))
        for i in range(self.nStates):
            state = self.stateTrajectory.get(i)
            for j, coordinateName in enumerate(self.coordinates):
                values[i, j] = self.coordinateSet.get(
                    coordinateName).getValue(state)

        if in_degrees:
            for j, coordinateName in enumerate(self.coordinates):
                if self.coordinateSet.get(coordinateName).getMotionType() == 1:
                    values[:, j] = np.rad2deg(values[:, j])

        if lowpass_cutoff_frequency > 0:
            values = lowPassFilter(self.time, values, lowpass_cutoff_frequency)

        data = np.concatenate(
            (np.expand_dims(self.time, axis=1), values), axis=1)
        columns = ['time'] + self.coordinates

        return pd.DataFrame(data=data, columns=columns)

    def get_force_records(self, lowpass_cutoff_frequency=-1):

        columns, records = [], []
        for i in range(self.nStates):
            state = self.stateTrajectory.get(i)
            self.model.realizeDynamics(state)
            row = []
            for force in self.forces:
                values = force.getRecordValues(state)
                row.extend([values.get(k) for k in range(values.getSize())])
                if i == 0:
                    labels = force.getRecordLabels()
                    for k in range(labels.getSize()):
                        label = labels.get(k)
                        if not label.startswith(force.getName()):
                            label = force.getName() + '.' + label
                        columns.append(label)
            records.append(row)
        records = np.array(records).reshape((self.nStates, len(columns)))

        if lowpass_cutoff_frequency > 0 and len(columns) > 0:
            records = lowPassFilter(self.time, records,
                                    lowpass_cutoff_frequency)

        data = np.concatenate(
            (np.expand_dims(self.time, axis=1), records), axis=1)

        return pd.DataFrame(data=data, columns=['time'] + columns)

    def get_muscle_forces(self):

        forces = np.zeros((self.nStates, len(self.muscleNames)))
        for i in range(self.nStates):
            state = self.stateTrajectory.get(i)
            self.model.realizeDynamics(state)
            for j in range(len(self.muscleNames)):
                forces[i, j] = self.muscles.get(j).getActuation(state)

        data = np.concatenate(
            (np.expand_dims(self.time, axis=1), forces), axis=1)

        return pd.DataFrame(data=data, columns=['time'] + self.muscleNames)

    def print_to_file(self, path):

        coordinates = self.get_coordinate_values(in_degrees=False)
        records = self.get_force_records()
        muscleForces = self.get_muscle_forces()
        table = pd.concat([coordinates,
                           records.drop(columns='time'),
                           muscleForces.drop(columns='time')], axis=1)
        numpy_to_storage(list(table.columns), table.to_numpy(), path,
                         datatype='knee_loading')

        return table
