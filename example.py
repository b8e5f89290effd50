'''
    ---------------------------------------------------------------------------
    Knee simulations: example.py
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
import utilsKneeSimulations
from settingsKneeSimulations import get_setup
from utils import storage_to_dataframe
from utilsOpenSim import load_model
from utilsPlotting import plot_dataframe

# %% User inputs.
# Specify the knee model; see settingsKneeSimulations.py for the default.
model_path = os.path.join('resources', 'geometries',
                          'closed_knee_ligaments_0_3 - post_ant_load_2.osim')

# Specify the knee flexion angles (deg) of the anterior load simulations.
knee_angles = [-90, -60, -20]

# Specify where to write the results.
output_dir = os.path.join('./Data', 'anterior_load')

# %% Simulate.
states = {}
for knee_angle in knee_angles:
    settings = get_setup('anterior_load', {'model_path': model_path,
                                           'output_dir': output_dir,
                                           'knee_angle': knee_angle})
    # Forces and controllers are added to the model: load a fresh model for
    # every simulation.
    model = load_model(settings['model_path'])
    outputs = utilsKneeSimulations.anteriorTibialLoadsFD(model, settings)
    states[knee_angle] = storage_to_dataframe(outputs['custom_reporter'])

# %% Plot: example.
# Plot selected knee coordinates against time.
plot_dataframe(dataframes = [states[a] for a in knee_angles],
               y = ['knee_anterior_posterior_r', 'knee_rotation_r'],
               xlabel = 'Time (s)',
               ylabel = 'Pos (m or rad)',
               title = 'Anterior tibial load',
               labels = [str(a) for a in knee_angles])
