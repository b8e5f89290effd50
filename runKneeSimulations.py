'''
    ---------------------------------------------------------------------------
    Knee simulations: runKneeSimulations.py
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

    Run one of the knee simulations from the command line, e.g.:
        python runKneeSimulations.py --simulation anterior_load --knee-angle -60
'''

import os
import sys
import argparse

from settingsKneeSimulations import simulationTypes, get_setup
from utils import (setup_logging, print_and_log, import_settings,
                   dump_settings, storage_to_dataframe)

simulationFunctions = {
    'forward': 'forwardSimulation',
    'anterior_load': 'anteriorTibialLoadsFD',
    'static_optimization': 'staticOptimization',
    'inverse': 'inverseSimulation',
    'activations': 'forwardSim'}

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Run forward/inverse dynamics and static optimization of the knee model.")

    parser.add_argument(
        "--simulation",
        choices=simulationTypes,
        default="forward",
        help="Simulation to run (default: forward).")

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Path to the OpenSim model (.osim) file (default: settings value).")

    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory of the result files (default: settings value).")

    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Yaml file overriding the default settings of the simulation.")

    parser.add_argument(
        "--knee-angle",
        type=float,
        default=None,
        help="Knee flexion angle: deg for poses and tibial loads, rad for activations.")

    parser.add_argument(
        "--plot",
        action="store_true",
        help="Plot the simulated states (default: False).")

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="OpenSim log level, e.g. info, warn, error (default: settings value).")

    return parser.parse_args(argv)

def get_simulation(simulation_type):
    # OpenSim is only imported when a simulation actually runs.
    import utilsOpenSim
    import utilsKneeSimulations

    simulation = getattr(utilsKneeSimulations,
                         simulationFunctions[simulation_type])

    def run(settings):
        model = utilsOpenSim.load_model(settings['model_path'],
                                        plugins=settings['plugins'],
                                        logLevel=settings['opensim_log_level'])
        return simulation(model, settings)

    return run

def get_settings(args):

    userSettings = {}
    if args.settings is not None:
        userSettings = import_settings(args.settings)
    settings = get_setup(args.simulation, userSettings)

    if args.model is not None:
        settings['model_path'] = args.model
    if args.output_dir is not None:
        settings['output_dir'] = args.output_dir
    if args.log_level is not None:
        settings['opensim_log_level'] = args.log_level
    if args.knee_angle is not None:
        if not 'knee_angle' in settings:
            raise ValueError('Simulation {} has no knee angle.'.format(
                args.simulation))
        # Pose and load tables are indexed by integer angles.
        if args.simulation != 'activations' and args.knee_angle.is_integer():
            settings['knee_angle'] = int(args.knee_angle)
        else:
            settings['knee_angle'] = args.knee_angle

    return settings

def plot_results(outputs, settings):
    from utilsPlotting import plot_dataframe

    if not 'states_degrees' in outputs:
        print_and_log('No states to plot.')
        return
    states = storage_to_dataframe(outputs['states_degrees'])
    savePath = os.path.splitext(outputs['states_degrees'])[0] + '.png'
    plot_dataframe([states], xlabel='Time (s)', title=settings['simulation'],
                   labels=[settings['simulation']], savePath=savePath)

def main(argv=None):

    args = parse_args(argv)
    try:
        settings = get_settings(args)
        outputDir = settings['output_dir']
        setup_logging(os.path.join(outputDir,
                                   '{}.log'.format(args.simulation)))
        dump_settings(settings, os.path.join(
            outputDir, 'Setup_{}.yaml'.format(args.simulation)))

        print_and_log('Running {} simulation.'.format(args.simulation))
        simulation = get_simulation(args.simulation)
        outputs = simulation(settings)
        for key in outputs:
            print_and_log('{}: {}'.format(key, outputs[key]))
        if args.plot:
            plot_results(outputs, settings)

    except RuntimeError as e:
        print_and_log('OpenSim exception: {}'.format(e))
        return 1
    except Exception as e:
        print_and_log('Unrecognized exception: {}'.format(e))
        return 1

    print_and_log('OpenSim simulation completed successfully.')

    return 0

if __name__ == '__main__':
    sys.exit(main())
