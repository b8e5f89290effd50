# -*- coding: utf-8 -*-
"""
Knee model constants.

Pose and load tables are indexed by knee flexion angle in degrees.
"""

# % Coordinates of the right knee joint.
kneeCoordinates = ['knee_angle_r',
                   'knee_adduction_r',
                   'knee_rotation_r',
                   'knee_anterior_posterior_r',
                   'knee_inferior_superior_r',
                   'knee_medial_lateral_r']

# % Knee poses. Values in rad (rotations) and m (translations).
# None means the coordinate default value from the model file.
kneePoses = {
    -120: {'knee_angle_r': -2.09439510,
           'knee_adduction_r': -0.19163894,
           'knee_rotation_r': 0.02110966,
           'knee_anterior_posterior_r': 0.02843407,
           'knee_inferior_superior_r': -0.41174209,
           'knee_medial_lateral_r': -0.00329063},
    -100: {'knee_angle_r': -1.74533,
           'knee_adduction_r': -0.23053779,
           'knee_rotation_r': 0.00044497,
           'knee_anterior_posterior_r': 0.0293309,
           'knee_inferior_superior_r': -0.40140432,
           'knee_medial_lateral_r': -0.00504724},
    -90: {'knee_angle_r': -1.57079,
          'knee_adduction_r': -0.24,
          'knee_rotation_r': 0.008,
          'knee_anterior_posterior_r': 0.0275,
          'knee_inferior_superior_r': -0.396,
          'knee_medial_lateral_r': -0.005},
    -80: {'knee_angle_r': -1.39626,
          'knee_adduction_r': -0.24427703,
          'knee_rotation_r': 0.01682137,
          'knee_anterior_posterior_r': 0.02661332,
          'knee_inferior_superior_r': -0.39351699,
          'knee_medial_lateral_r': -0.00483042},
    -60: {'knee_angle_r': -1.0472,
          'knee_adduction_r': -0.29941123,
          'knee_rotation_r': -0.00183259,
          'knee_anterior_posterior_r': 0.02092232,
          'knee_inferior_superior_r': -0.38597298,
          'knee_medial_lateral_r': -0.00403978},
    -40: {'knee_angle_r': -0.698132,
          'knee_adduction_r': -0.25397256,
          'knee_rotation_r': 0.03301188,
          'knee_anterior_posterior_r': 0.012679,
          'knee_inferior_superior_r': -0.38227168,
          'knee_medial_lateral_r': -0.00403308},
    -20: {'knee_angle_r': -0.349066,
          'knee_adduction_r': -0.295525,
          'knee_rotation_r': 0.0044018,
          'knee_anterior_posterior_r': 0.00522225,
          'knee_inferior_superior_r': -0.382426,
          'knee_medial_lateral_r': -0.00486},
    -15: {'knee_angle_r': -0.26179938,
          'knee_adduction_r': -0.279252,
          'knee_rotation_r': -0.03060429,
          'knee_anterior_posterior_r': 0.004,
          'knee_inferior_superior_r': -0.384,
          'knee_medial_lateral_r': -0.00391863},
    0: {coordinate: None for coordinate in kneeCoordinates},
    }

# Knee adduction used for the anterior load at -90 deg flexion (+10 deg).
# Other flexion angles used -0.03490 (-80), -0.122173 (-60 and -40),
# -0.191986 (-20) and -0.29408 (0).
antLoadKneeAdduction = -0.05235

# % Anterior tibial loads (N), applied to the tibia as constant forces.
tibialLoads = {
    0: [110.0, 0.0, 0.0],
    -15: [106.25, -28.47, 0.0],
    -20: [103.366188, -37.6222, 0.0],
    -40: [84.26488, -70.7066, 0.0],
    -60: [55.0, -95.2627, 0.0],
    -80: [19.101, -108.3288, 0.0],
    -90: [0.0, -110.0, 0.0],
    }

# % Muscle groups.
muscleGroups = {
    # hamstrings (bi*, semi*), gracilis, gastrocnemii, sartorius
    'flexors': ['bifemlh_r', 'bifemsh_r', 'grac_r', 'lat_gas_r', 'med_gas_r',
                'sar_r', 'semimem_r', 'semiten_r'],
    # quadriceps
    'extensors': ['rect_fem_r', 'vas_med_r', 'vas_int_r', 'vas_lat_r'],
    }

# Constant excitation per controller: (muscle group, excitation).
controllerExcitations = {
    'flexion': ('flexors', 1.0),
    'extension': ('extensors', 0.6),
    }

# % Force elements reported by the knee loading analysis.
kneeForceClasses = ['CustomLigament', 'Ligament', 'Blankevoort1991Ligament',
                    'ElasticFoundationForce', 'HuntCrossleyForce',
                    'SmoothSphereHalfSpaceForce']

# % Result file names. {} is replaced by the case suffix.
outputFiles = {
    'states': 'states_{}.sto',
    'states_degrees': 'states_degrees_{}.mot',
    'force_reporter': 'force_reporter_{}.mot',
    'custom_reporter': 'custom_reporter_{}.mot',
    }
