"""Config schema for idle_chase simulation plugin."""

REQUIRED_PARAMS = {
    "chaser_count": int,
}

DEFAULTS = {
    # arena
    "arena_size": 100.0,
    "arena_margin": 5.0,
    "spawn_inset": 10.0,
    "spawn_attempts": 50,
    "spawn_margin": 5.0,
    "spawn_fallback": [50.0, 50.0],
    "agent_margin": 1.0,
    # obstacles
    "obstacle_count_min": 5,
    "obstacle_count_max": 8,
    "obstacle_attempts": 30,
    "obstacle_gap": 4.0,
    "obstacle_long_min": 10.0,
    "obstacle_long_max": 20.0,
    "obstacle_short_min": 3.0,
    "obstacle_short_max": 5.0,
    "safe_zone_radius": 12.0,
    # targets
    "initial_targets": 12,
    "target_cap": 15,
    "target_spawn_interval": 1.5,
    "special_target_chance": 0.15,
    "target_pickup_radius": 5.0,
    "normal_target_points": 10,
    "special_target_points": 50,
    # chasers
    "chaser_count": 4,
    "chaser_pickup_radius": 4.0,
    "chaser_points": 200,
    "chaser_speed_aggressive": 14.0,
    "chaser_speed_smart": 13.0,
    "chaser_speed_random": 11.0,
    "chaser_speed_ambusher": 12.0,
    "chaser_scared_speed": 7.0,
    "speed_jitter": 0.2,
    "mode_weights_aggressive": [0.7, 0.1, 0.2],
    "mode_weights_smart": [0.4, 0.4, 0.2],
    "mode_weights_random": [0.2, 0.1, 0.7],
    "mode_weights_ambusher": [0.2, 0.6, 0.2],
    "chase_ticks": [80, 140],
    "ambush_ticks": [80, 140],
    "random_ticks": [100, 200],
    "flee_ticks": 120,
    "chase_max_distance": 45.0,
    "ambush_lookahead": 20.0,
    "flee_danger_radius": 35.0,
    "random_turn_probability": 0.05,
    "chaser_turn_blend": 0.4,
    "chaser_respawn_delay": 4.0,
    # seeker
    "seeker_speed": 30.0,
    "seeker_power_speed": 36.0,
    "seeker_warning_radius": 25.0,
    "seeker_pursuit_range": 70.0,
    "special_target_weight": 0.4,
    "chaser_target_weight": 0.6,
    "seeker_replan_probability": 0.05,
    "waypoint_arrival_radius": 2.0,
    "stuck_epsilon": 0.1,
    "stuck_threshold": 10,
    # power mode and scoring
    "power_mode_duration": 10,
    "milestone_interval": 300,
    "message_duration": 2.5,
    "passive_points": 1,
    "passive_interval": 1.0,
    # pathfinder
    "path_grid_size": 5.0,
    "path_max_iterations": 50,
    "path_cache_size": 100,
    "path_cache_bypass": 0.3,
    "path_avoid_radius": 10.0,
    "path_obstacle_margin": 3.0,
    "path_goal_factor": 2.0,
    "path_smoothing_window": 3,
    # feedback effects
    "particle_gravity": 222.0,
    "particle_decay": 0.67,
    "particle_speed_min": 66.0,
    "particle_speed_max": 100.0,
    "eating_duration": 0.2,
    "mouth_interval": 0.2,
    "mouth_interval_eating": 0.1,
}

OPTIONAL_PARAMS = {
    "arena_size": float,
    "arena_margin": float,
    "spawn_inset": float,
    "spawn_attempts": int,
    "spawn_margin": float,
    "spawn_fallback": list,
    "agent_margin": float,
    "obstacle_count_min": int,
    "obstacle_count_max": int,
    "obstacle_attempts": int,
    "obstacle_gap": float,
    "obstacle_long_min": float,
    "obstacle_long_max": float,
    "obstacle_short_min": float,
    "obstacle_short_max": float,
    "safe_zone_radius": float,
    "initial_targets": int,
    "target_cap": int,
    "target_spawn_interval": float,
    "special_target_chance": float,
    "target_pickup_radius": float,
    "normal_target_points": int,
    "special_target_points": int,
    "chaser_pickup_radius": float,
    "chaser_points": int,
    "chaser_speed_aggressive": float,
    "chaser_speed_smart": float,
    "chaser_speed_random": float,
    "chaser_speed_ambusher": float,
    "chaser_scared_speed": float,
    "speed_jitter": float,
    "mode_weights_aggressive": list,
    "mode_weights_smart": list,
    "mode_weights_random": list,
    "mode_weights_ambusher": list,
    "chase_ticks": list,
    "ambush_ticks": list,
    "random_ticks": list,
    "flee_ticks": int,
    "chase_max_distance": float,
    "ambush_lookahead": float,
    "flee_danger_radius": float,
    "random_turn_probability": float,
    "chaser_turn_blend": float,
    "chaser_respawn_delay": float,
    "seeker_speed": float,
    "seeker_power_speed": float,
    "seeker_warning_radius": float,
    "seeker_pursuit_range": float,
    "special_target_weight": float,
    "chaser_target_weight": float,
    "seeker_replan_probability": float,
    "waypoint_arrival_radius": float,
    "stuck_epsilon": float,
    "stuck_threshold": int,
    "power_mode_duration": int,
    "milestone_interval": int,
    "message_duration": float,
    "passive_points": int,
    "passive_interval": float,
    "path_grid_size": float,
    "path_max_iterations": int,
    "path_cache_size": int,
    "path_cache_bypass": float,
    "path_avoid_radius": float,
    "path_obstacle_margin": float,
    "path_goal_factor": float,
    "path_smoothing_window": int,
    "particle_gravity": float,
    "particle_decay": float,
    "particle_speed_min": float,
    "particle_speed_max": float,
    "eating_duration": float,
    "mouth_interval": float,
    "mouth_interval_eating": float,
}

# Inclusive minimums; list params are checked element-wise.
LOWER_BOUNDS = {
    "chaser_count": 0,
    "arena_size": 1.0,
    "arena_margin": 0.0,
    "spawn_attempts": 1,
    "obstacle_count_min": 0,
    "obstacle_count_max": 0,
    "initial_targets": 0,
    "target_cap": 0,
    "target_spawn_interval": 0.01,
    "target_pickup_radius": 0.0,
    "chaser_pickup_radius": 0.0,
    "chaser_speed_aggressive": 0.0,
    "chaser_speed_smart": 0.0,
    "chaser_speed_random": 0.0,
    "chaser_speed_ambusher": 0.0,
    "chaser_scared_speed": 0.0,
    "mode_weights_aggressive": 0.0,
    "mode_weights_smart": 0.0,
    "mode_weights_random": 0.0,
    "mode_weights_ambusher": 0.0,
    "chase_ticks": 0,
    "ambush_ticks": 0,
    "random_ticks": 0,
    "flee_ticks": 0,
    "chaser_respawn_delay": 0.0,
    "seeker_speed": 0.0,
    "seeker_power_speed": 0.0,
    "stuck_threshold": 1,
    "power_mode_duration": 0,
    "milestone_interval": 1,
    "message_duration": 0.0,
    "passive_interval": 0.01,
    "path_grid_size": 0.5,
    "path_max_iterations": 1,
    "path_cache_size": 1,
    "path_cache_bypass": 0.0,
    "path_goal_factor": 0.0,
    "path_smoothing_window": 0,
    "particle_decay": 0.0,
    "mouth_interval": 0.01,
    "mouth_interval_eating": 0.01,
}
